from .chapter import Chapter, ChapterStatus, count_words
from .manuscript import ManuscriptNode, ManuscriptStructure, NodeType
from .project import Project, ProjectMetadata, ProjectState, sanitize_filename
from .errors import (
    ProjectError, ProjectIOError, PartialSaveError, StructureParseError,
    MetadataParseError, ProjectNotFoundError, ChapterNotFoundError
)

__all__ = [
    'Chapter', 'ChapterStatus', 'count_words',
    'ManuscriptNode', 'ManuscriptStructure', 'NodeType',
    'Project', 'ProjectMetadata', 'ProjectState', 'sanitize_filename',
    'ProjectError', 'ProjectIOError', 'PartialSaveError', 'StructureParseError',
    'MetadataParseError', 'ProjectNotFoundError', 'ChapterNotFoundError'
]
