"""Configuration for in-package doctests.

Should be importable (but not useful)
without development dependencies.
"""
from pathlib import Path

try:
    import pytest

    decorator = pytest.fixture(autouse=True)

except ImportError:
    def decorator(fn):
        return fn


@decorator
def add_tmp_dir(doctest_namespace, tmp_path):
    """Give all doctests access to a ``tmp_dir`` variable.

    ``tmp_dir`` is a ``pathlib.Path`` to a real directory
    in pytest's tmp directory which is automatically cleaned up
    in later invocations of ``pytest``.
    """
    doctest_namespace["tmp_dir"] = Path(tmp_path)
