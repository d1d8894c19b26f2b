"""Integration tests for Confluence XML package ingestion.

These tests write complete exports to temporary directories and read them
through the public API and the confluence-xml command, covering:
- Unpacked directories, zip files, file URLs and zip streams
- Stream parsing, relationship resolution and index lookups together
- Cleanup of extracted packages and index trees

Use the integration mark to run them on their own:
    pytest tests/integration -m integration
"""
