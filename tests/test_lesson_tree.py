"""
Tests for lesson tree assembly.
"""

import uuid

from storefront.models.course import CourseMaterial, Lesson
from storefront.services.lesson_tree import build_lesson_tree

COURSE_ID = uuid.uuid4()


def lesson(title, order_index=0, parent=None):
    return Lesson(
        id=uuid.uuid4(),
        course_id=COURSE_ID,
        parent_lesson_id=parent.id if isinstance(parent, Lesson) else parent,
        title=title,
        order_index=order_index,
        is_published=True,
    )


def material(title, owner, order_index=0):
    return CourseMaterial(
        id=uuid.uuid4(),
        course_id=COURSE_ID,
        lesson_id=owner.id if owner is not None else None,
        title=title,
        file_url=f"https://cdn.example/{title}.pdf",
        material_type="pdf",
        order_index=order_index,
    )


def titles(nodes):
    return [node["title"] for node in nodes]


def test_nests_sub_lessons_in_order():
    intro = lesson("Intro", 0)
    basics = lesson("Basics", 1)
    setup = lesson("Setup", 1, parent=intro)
    welcome = lesson("Welcome", 0, parent=intro)

    tree = build_lesson_tree([setup, basics, welcome, intro])

    assert titles(tree) == ["Intro", "Basics"]
    assert titles(tree[0]["sub_lessons"]) == ["Welcome", "Setup"]
    assert tree[0]["sub_lessons"][0]["parent_lesson_id"] == str(intro.id)
    assert tree[1]["sub_lessons"] == []


def test_deep_nesting():
    root = lesson("Module 1")
    chapter = lesson("Chapter 1", parent=root)
    section = lesson("Section 1.1", parent=chapter)

    tree = build_lesson_tree([section, chapter, root])

    assert titles(tree) == ["Module 1"]
    assert titles(tree[0]["sub_lessons"][0]["sub_lessons"]) == ["Section 1.1"]


def test_materials_attach_to_their_lesson():
    intro = lesson("Intro", 0)
    basics = lesson("Basics", 1)
    slides = material("slides", intro, 1)
    notes = material("notes", intro, 0)
    stray = material("stray", None)

    tree = build_lesson_tree([intro, basics], [slides, stray, notes])

    assert titles(tree[0]["materials"]) == ["notes", "slides"]
    assert tree[1]["materials"] == []
    assert tree[0]["materials"][0]["file_url"] == "https://cdn.example/notes.pdf"


def test_orphan_lessons_become_roots():
    orphan = lesson("Orphan", 2, parent=uuid.uuid4())
    intro = lesson("Intro", 0)

    tree = build_lesson_tree([orphan, intro])

    assert titles(tree) == ["Intro", "Orphan"]


def test_parent_cycle_does_not_loop():
    first = lesson("First", 0)
    second = lesson("Second", 1, parent=first)
    first.parent_lesson_id = second.id

    tree = build_lesson_tree([first, second])

    assert titles(tree) == ["First", "Second"]
    assert all(node["sub_lessons"] == [] for node in tree)


def test_empty_course():
    assert build_lesson_tree([]) == []
