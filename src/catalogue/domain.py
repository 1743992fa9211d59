"""Catalogue bounded context: products, categories and the catalog read queries."""

import structlog

logger = structlog.get_logger(__name__)
