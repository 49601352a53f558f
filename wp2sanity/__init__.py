"""
Top-level package for the WordPress → Sanity migration utility.

This package bundles all components required to pull posts from the
WordPress REST API, convert post bodies to Sanity Portable Text, upload
images to the Sanity asset store, write post and tag documents, and
generate redirect maps.  Modules are split into subpackages:

* :mod:`wp2sanity.extractors` – paginated WordPress REST retrieval
* :mod:`wp2sanity.parsers` – HTML to Portable Text conversion
* :mod:`wp2sanity.migrators` – Sanity API interactions
* :mod:`wp2sanity.models` – pydantic models of the written documents
* :mod:`wp2sanity.utils` – entities, taxonomies, logging and redirects

The converter has no knowledge of configuration or the network;
orchestration is handled in :mod:`wp2sanity.migration_tool`.
"""
