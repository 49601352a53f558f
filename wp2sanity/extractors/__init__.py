"""
Extractors for the WordPress REST API.

This subpackage pages through the ``wp/v2`` collections and returns the
raw JSON records, and lists the image URLs a post body references so
they can be uploaded before conversion.
"""
