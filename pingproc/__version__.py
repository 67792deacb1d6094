"""Version information for pingproc."""

__version__ = "1.0.0"
__version_info__ = (1, 0, 0)

# Release information
__author__ = "NetScope Team"
__author_email__ = "team@netscope.dev"
__license__ = "MIT"
__url__ = "https://github.com/netscope-tool/pingproc"
__description__ = "Blocking, background and batched execution of the system ping utility"
