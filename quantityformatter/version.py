__version__ = "0.4.1"
__version_info__ = tuple(__version__.split("."))
