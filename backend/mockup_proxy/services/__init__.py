# Services package init
"""
Mockup Approval Proxy - Services Layer
========================================

Service Inventory:
    Signature path (in call order):
    - credentials:        DocuSignCredentials resolved from settings
    - docusign_auth:      TokenProvider / JWTTokenProvider (JWT-bearer grant)
    - envelope_builder:   positions → sign-here / initial tabs (pure)
    - envelope_submitter: POST to the envelope-create endpoint
    - send_log_store:     JSON file or database send log, SendLogger
    - signature_service:  orchestrates the above for one request

    Pass-through:
    - brightpearl_service: order / product / availability lookups
    - image_service:       SFTP product images, URL image proxy
    - http_client:         shared httpx.AsyncClient
"""
