"""
Cat API — Services Layer
==========================

Service inventory:
    - CatService:    cat reads, create, owner and admin mutations
    - UserService:   sign-up, self-service account changes, login
    - ImageService:  photo validation, storage, thumbnails, GPS location
    - geo:           coordinate parsing and bounding-box polygons

Services receive the session and the caller identity as arguments and
raise CatApiError subclasses; they never build HTTP responses.
"""
