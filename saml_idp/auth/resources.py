"""
Resource loading module.
Resolves logical resource names such as ``classpath:/template-idp-metadata.xml``.
"""
import io
import os

from .errors import MetadataIOError

CLASSPATH_PREFIX = 'classpath:'
FILE_PREFIX = 'file:'


def get_default_resource_dir():
    """
    Get the directory holding the bundled resources.

    Returns:
        str: Path to the ``resources`` directory of this package.
    """
    base_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    return os.path.join(base_dir, 'resources')


class ResourceLoader:
    """Resolves and opens read-only text resources by name."""

    def __init__(self, resource_dir=None):
        self.resource_dir = resource_dir or get_default_resource_dir()

    def get_resource(self, name):
        """
        Resolve a resource name to a filesystem path.

        Args:
            name (str): ``classpath:<path>``, ``file:<path>`` or a plain path.

        Returns:
            str: The resolved path. The file is not required to exist.
        """
        if name.startswith(CLASSPATH_PREFIX):
            relative = name[len(CLASSPATH_PREFIX):].lstrip('/')
            return os.path.join(self.resource_dir, relative)
        if name.startswith(FILE_PREFIX):
            return name[len(FILE_PREFIX):]
        return name

    def open_resource(self, name):
        """
        Open a resource for reading as UTF-8 text.

        Raises:
            MetadataIOError: If the resource does not exist or cannot be read.
        """
        path = self.get_resource(name)
        try:
            return io.open(path, 'r', encoding='utf-8')
        except OSError as e:
            raise MetadataIOError(f"Resource {name} cannot be read from {path}: {e}") from e
