"""
Markdown reading: task lines, query blocks and vault folders.
"""

from task_query.markdown.detector import QueryBlock, QueryBlockDetector
from task_query.markdown.task_parser import extract_tasks, parse_task_line, serialize_task
from task_query.markdown.vault import load_tasks_file, load_vault

__all__ = [
    "QueryBlock",
    "QueryBlockDetector",
    "extract_tasks",
    "load_tasks_file",
    "load_vault",
    "parse_task_line",
    "serialize_task",
]
