def pytest_ignore_collect(collection_path, config):
    """Return True to prevent considering this path for collection.
    This hook is consulted for all files and directories prior to calling
    more specific hooks.
    """
    path = str(collection_path)
    for pattern in (
        "/docs",
        "/examples",
        "/dist/",
        "/build/",
    ):
        if pattern in path:
            return True
