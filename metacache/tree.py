"""
Directory tree listing

The tree is always built from a live scan of the file system, it does not use the metadata cache.
"""

from pathlib import Path

from metacache.models import TreeNode


def _sort_key(node: TreeNode):
    # folders before files, then by name
    return (node.type != "folder", node.name.lower(), node.name)


def _walk(directory: Path) -> list[TreeNode]:
    nodes = []
    for entry in directory.iterdir():
        if entry.is_dir():
            nodes.append(TreeNode(name=entry.name, type="folder", path=str(entry), children=_walk(entry)))
        elif entry.is_file():
            nodes.append(TreeNode(name=entry.name, type="file", path=str(entry)))
    return sorted(nodes, key=_sort_key)


def build_directory_tree(root: Path | str) -> TreeNode:
    """
    List the contents of root recursively
    :raises FileNotFoundError: if root does not exist
    """
    root = Path(root).absolute()
    if not root.is_dir():
        raise FileNotFoundError(f"Directory {root} does not exist")
    return TreeNode(name=root.name, type="folder", path=str(root), children=_walk(root))
