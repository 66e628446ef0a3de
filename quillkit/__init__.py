"""quillkit - manuscript projects and multi-format book export."""

__version__ = "1.0.0"
__author__ = "quillkit"

from .models import Project, Chapter, ManuscriptStructure
from .export import export_project, get_exporter

__all__ = [
    '__version__',
    'Project',
    'Chapter',
    'ManuscriptStructure',
    'export_project',
    'get_exporter'
]
