"""Application constants and defaults."""
from pathlib import Path

# Directory Structure
DEFAULT_PROJECTS_DIR = Path("./manuscripts")
DEFAULT_LOG_DIR = Path.home() / ".quillkit" / "logs"
PROJECT_DIR_SUFFIX = ".quill"

# File Names
STRUCTURE_FILE = "manuscript.json"
METADATA_FILE = "metadata.yaml"
CHAPTER_EXTENSION = ".md"

# Directory Names
CHAPTERS_DIR = "chapters"
SNAPSHOTS_DIR = "snapshots"
EXPORTS_DIR = "exports"

# Created by Project.create; only chapters/ and snapshots/ are written by this package
PROJECT_SUBDIRS = [
    CHAPTERS_DIR,
    SNAPSHOTS_DIR,
    "history",
    "notes/characters",
    "notes/locations",
    "notes/worldbuilding",
    "notes/scratch",
    "fonts",
    "sounds",
    "ghost-notes",
    EXPORTS_DIR,
]

# Chapter frontmatter
FRONTMATTER_DELIMITER = "---"
DEFAULT_CHAPTER_TITLE = "Untitled"
DEFAULT_PROJECT_TITLE = "Untitled"
DEFAULT_SNAPSHOT_NAME = "manual"
SNAPSHOT_TIMESTAMP_FORMAT = "%Y-%m-%dT%H-%M-%S"

# Supported Export Formats (format name -> file extension)
EXPORT_FORMATS = {
    'markdown': 'md',
    'text': 'txt',
    'html': 'html',
    'latex': 'tex',
    'epub': 'epub',
}

# EPUB container
EPUB_MIMETYPE = "application/epub+zip"
EPUB_UID_PREFIX = "quillkit"
XHTML_MEDIA_TYPE = "application/xhtml+xml"
NCX_MEDIA_TYPE = "application/x-dtbncx+xml"
CSS_MEDIA_TYPE = "text/css"
OPF_MEDIA_TYPE = "application/oebps-package+xml"
DOCUMENT_LANGUAGE = "en"

# Logging
LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR']
