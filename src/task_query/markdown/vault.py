"""
Loading task snapshots from a folder of markdown files.
"""

from pathlib import Path

import frontmatter
import yaml
from loguru import logger

from task_query.markdown.task_parser import extract_tasks
from task_query.models import Task, TasksFile


def load_tasks_file(path: Path, root: Path) -> tuple[TasksFile, str]:
    """Read a markdown file, returning its TasksFile and full text.

    Files with malformed frontmatter are treated as having no properties.
    """
    text = path.read_text(encoding="utf-8")
    relative = path.relative_to(root).as_posix()
    try:
        post = frontmatter.loads(text)
        properties = dict(post.metadata)
    except yaml.YAMLError as e:
        logger.warning(f"Ignoring invalid frontmatter in {relative}: {e}")
        properties = {}
    return TasksFile(path=relative, frontmatter=properties), text


def load_vault(root: Path) -> list[Task]:
    """Parse every task in every markdown file under ``root``, in path order."""
    tasks: list[Task] = []
    for path in sorted(root.rglob("*.md")):
        if any(part.startswith(".") for part in path.relative_to(root).parts):
            continue
        tasks_file, text = load_tasks_file(path, root)
        tasks.extend(extract_tasks(text, tasks_file.path, tasks_file))

    logger.debug(f"Loaded {len(tasks)} tasks from {root}")
    return tasks
