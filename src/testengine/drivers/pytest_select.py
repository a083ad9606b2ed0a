"""pytest plugin that runs only the node ids listed in a selection file.

The pytest driver copies this file next to its selection file and loads it
in the child process with ``-p testengine_select``. Unlike ``--deselect``,
which matches node id prefixes, selection here is by exact node id.
"""

import os

SELECTED_ENV = "TESTENGINE_SELECTED"


def pytest_collection_modifyitems(config, items):
    path = os.environ.get(SELECTED_ENV)
    if not path:
        return

    with open(path, encoding="utf-8") as f:
        selected = set(f.read().splitlines())

    deselected = [item for item in items if item.nodeid not in selected]
    if deselected:
        config.hook.pytest_deselected(items=deselected)
        items[:] = [item for item in items if item.nodeid in selected]
