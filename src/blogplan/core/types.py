"""Core type definitions."""

from enum import Enum
from typing import NewType

# URL path for routing (e.g., "/", "/hello-world/", "/blog/2")
# Distinct from filesystem Path to catch type mismatches
URLPath = NewType("URLPath", str)


class PostType(Enum):
    """Classification of a content node, resolved once at ingestion."""

    POST = "post"
    GLOSSARY = "glossary"


class TemplateKind(Enum):
    """Template a planned page is rendered with."""

    POST = "post"
    GLOSSARY_TERM = "glossary-term"
    INDEX = "index"


# Route prefixes shared by content validation and page planning
GLOSSARY_PREFIX = "/glossary"
BLOG_PREFIX = "/blog"
