"""
Sanity API migrators and helpers.

This subpackage provides functions to upload images to the Sanity asset
store and write documents through the mutation API.  It encapsulates
rate limiting, automatic retries and authorization headers.
"""
