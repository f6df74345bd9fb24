from runcompare.catalog.extractor import Catalog, extract_catalog

__all__ = ["Catalog", "extract_catalog"]
