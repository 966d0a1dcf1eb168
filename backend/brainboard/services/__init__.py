"""
Brainboard Backend: Services Layer
==================================

What:  Business logic between the routes (HTTP) and the database.

Service Inventory:
    - IdentityProvider:     session token issue/validate (python-jose)
    - CredentialStore:      signup and password verification (passlib bcrypt)
    - PermissionResolver:   owner / grant / share-token permission lattice
    - BoardStore:           boards and thumbnails
    - CardStore:            text/image cards, partial update, blob cleanup
    - AccessGrantStore:     per-user grants (upsert)
    - ShareStore:           anonymous share links
    - ObjectStorage:        S3 or local-disk blobs
    - ImageUploadGateway:   upload validation and key layout

Services receive the request's AsyncSession on every call and hold no
per-request state; one instance of each lives in the ServiceContainer.
"""
