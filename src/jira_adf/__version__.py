"""Version information for the Jira ADF converter.

Single source of truth for version number.
Follows PEP 440 and semantic versioning principles.
"""

__version__ = "1.2.0"
__version_info__ = tuple(int(part) for part in __version__.split("."))

# Version history:
# 1.2.0 - Worklog and transition comments, depth-limited rendering
# 1.1.0 - Jira client write path (create/update/comment)
# 1.0.0 - ADF to Markdown/plain text converter
