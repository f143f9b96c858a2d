"""
Lesson tree assembly.

Lessons are stored flat with a parent_lesson_id; the admin panel and the
learning page need them nested, with materials attached to their lesson.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional, Sequence

from storefront.models.course import CourseMaterial, Lesson

logger = logging.getLogger(__name__)


def _material_dict(material: CourseMaterial) -> Dict[str, Any]:
    return {
        "id": str(material.id),
        "lesson_id": str(material.lesson_id) if material.lesson_id else None,
        "title": material.title,
        "file_url": material.file_url,
        "material_type": material.material_type,
        "order_index": material.order_index,
    }


def _lesson_dict(lesson: Lesson) -> Dict[str, Any]:
    return {
        "id": str(lesson.id),
        "course_id": str(lesson.course_id),
        "parent_lesson_id": str(lesson.parent_lesson_id) if lesson.parent_lesson_id else None,
        "title": lesson.title,
        "description": lesson.description,
        "order_index": lesson.order_index,
        "is_published": bool(lesson.is_published),
        "materials": [],
        "sub_lessons": [],
    }


def _on_cycle(lesson_id: uuid.UUID, parent_of: Dict[uuid.UUID, uuid.UUID]) -> bool:
    """True when following parents from `lesson_id` leads back to it."""
    seen = set()
    current: Optional[uuid.UUID] = parent_of.get(lesson_id)
    while current is not None and current not in seen:
        if current == lesson_id:
            return True
        seen.add(current)
        current = parent_of.get(current)
    return False


def build_lesson_tree(
    lessons: Sequence[Lesson],
    materials: Sequence[CourseMaterial] = (),
) -> List[Dict[str, Any]]:
    """
    Nest flat lesson rows into root lessons with `sub_lessons` and `materials`.

    Siblings and materials are ordered by order_index. A lesson whose parent
    is not among `lessons`, or that sits on a parent cycle, becomes a root.
    Materials without a known lesson are left out.
    """
    ordered = sorted(lessons, key=lambda lesson: lesson.order_index)
    nodes: Dict[uuid.UUID, Dict[str, Any]] = {
        lesson.id: _lesson_dict(lesson) for lesson in ordered
    }

    for material in sorted(materials, key=lambda m: m.order_index):
        node = nodes.get(material.lesson_id) if material.lesson_id else None
        if node is not None:
            node["materials"].append(_material_dict(material))

    parent_of = {
        lesson.id: lesson.parent_lesson_id
        for lesson in ordered
        if lesson.parent_lesson_id and lesson.parent_lesson_id in nodes
    }

    roots: List[Dict[str, Any]] = []
    for lesson in ordered:
        node = nodes[lesson.id]
        parent_id = parent_of.get(lesson.id)

        if parent_id is None:
            if lesson.parent_lesson_id:
                logger.warning(
                    f"Lesson {lesson.id} references missing parent "
                    f"{lesson.parent_lesson_id}; shown at top level"
                )
            roots.append(node)
        elif _on_cycle(lesson.id, parent_of):
            logger.warning(f"Lesson {lesson.id} is part of a parent cycle; shown at top level")
            roots.append(node)
        else:
            nodes[parent_id]["sub_lessons"].append(node)

    return roots
