"""NiceGUI interface - thin presentation layer over the API.

Pages:
    - /: Home with an optional visitor name
    - /about: About the application
    - /contact: Support Q&A with streamed answers and sources
    - /upload: Document upload, listing and removal
    - Not-found and global error pages

Contains minimal business logic. Delegates all operations to the API over
HTTP. Importing ``framelink.ui.pages``, ``contact_page`` and ``upload_page``
registers the routes.
"""
