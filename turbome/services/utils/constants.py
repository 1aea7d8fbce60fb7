# Constants for the storage, workspace and search services

# Extension to MIME type, GitLab style
MIME_TYPES = {
    ".json": "application/json",
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".markdown": "text/markdown",
    ".js": "application/javascript",
    ".ts": "application/typescript",
    ".html": "text/html",
    ".css": "text/css",
    ".xml": "application/xml",
    ".csv": "text/csv",
    ".yaml": "application/x-yaml",
    ".yml": "application/x-yaml",
    ".log": "text/plain",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".pdf": "application/pdf",
    ".zip": "application/zip",
}
DEFAULT_MIME_TYPE = "application/octet-stream"

# Always served as base64
BINARY_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".pdf", ".zip", ".exe", ".bin"}

MARKDOWN_EXTENSIONS = {".md", ".markdown"}

# Version control metadata is never scanned, even with include_hidden
VCS_DIRECTORIES = {".git", ".svn", ".hg"}

# Workspace index
WORKSPACE_KEY = "workspace"
WORKSPACE_SCAN_LINES = 10
DEFAULT_WORKSPACE_FILE_LIMIT = 100
MAX_WORKSPACE_MATCHES = 500

# Search limits
DEFAULT_SEARCH_LIMIT = 20
MAX_SEARCH_LIMIT = 50
MAX_FILENAME_MATCHES = 50
MAX_CONTENT_MATCHES = 100
SEARCH_CONTEXT_CHARS = 30

# Commit log pagination
DEFAULT_PER_PAGE = 20
MAX_PER_PAGE = 100
