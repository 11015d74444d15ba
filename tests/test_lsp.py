from __future__ import annotations

from lsprotocol.types import (
    CreateFile,
    OptionalVersionedTextDocumentIdentifier,
    Position,
    Range,
    TextDocumentEdit,
    TextEdit,
    WorkspaceEdit,
)

from buffer_bridge.sync import (
    EditOperation,
    document_path,
    from_lsp_position,
    path_to_uri,
    text_edits_to_operations,
    to_lsp_position,
    uri_to_path,
)
from buffer_bridge.sync.lsp import workspace_edit_to_patches


def make_edit(
    start: tuple[int, int], end: tuple[int, int], text: str
) -> TextEdit:
    return TextEdit(
        range=Range(
            start=Position(line=start[0], character=start[1]),
            end=Position(line=end[0], character=end[1]),
        ),
        new_text=text,
    )


def apply_ops(lines: list[str], ops) -> list[str]:
    """Reference interpreter with the same semantics as the patch applier."""

    result = list(lines)
    for op in ops:
        if op.kind.value == "delete":
            del result[op.line - 1]
        elif op.kind.value == "replace":
            result[op.line - 1 : op.line - 1 + len(op.value)] = list(op.value)
        else:
            result[op.line : op.line] = list(op.value)
    return result


def test_positions_convert_between_bases() -> None:
    position = to_lsp_position(3, 7)
    assert (position.line, position.character) == (2, 6)
    assert from_lsp_position(position) == (3, 7)


def test_uri_and_path_helpers(tmp_path) -> None:
    target = tmp_path / "dir with space" / "a.py"
    uri = path_to_uri(str(target))
    assert uri.startswith("file://")
    assert "%20" in uri
    assert uri_to_path(uri) == str(target)
    assert document_path(uri, "/elsewhere") == str(target)
    assert document_path("a.py", str(tmp_path)) == str(tmp_path / "a.py")
    assert uri_to_path("untitled:Untitled-1") == "untitled:Untitled-1"


def test_single_line_word_edits() -> None:
    lines = ["let x = x + 1"]
    ops = text_edits_to_operations(
        lines,
        [make_edit((0, 4), (0, 5), "y"), make_edit((0, 8), (0, 9), "y")],
    )
    assert apply_ops(lines, ops) == ["let y = y + 1"]
    assert all(op.kind.value == "replace" for op in ops)


def test_edits_are_emitted_bottom_up() -> None:
    lines = ["a = 1", "b = a", "c = a"]
    ops = text_edits_to_operations(
        lines, [make_edit((0, 0), (0, 1), "z"), make_edit((2, 4), (2, 5), "z")]
    )
    assert [op.line for op in ops] == [3, 1]
    assert apply_ops(lines, ops) == ["z = 1", "b = a", "c = z"]


def test_multiline_replacement_collapses_lines() -> None:
    lines = ["def f(", "    a,", "    b,", "):"]
    ops = text_edits_to_operations(lines, [make_edit((0, 6), (3, 0), "a, b")])
    assert apply_ops(lines, ops) == ["def f(a, b):"]
    assert ops[0] == EditOperation.replace(1, "def f(a, b):")
    assert [op.kind.value for op in ops[1:]] == ["delete", "delete", "delete"]


def test_insertion_with_newlines_appends_lines() -> None:
    lines = ["first", "last"]
    ops = text_edits_to_operations(lines, [make_edit((0, 5), (0, 5), "\nsecond")])
    assert apply_ops(lines, ops) == ["first", "second", "last"]


def test_edit_past_end_of_document_appends() -> None:
    lines = ["only"]
    ops = text_edits_to_operations(lines, [make_edit((1, 0), (1, 0), "tail\n")])
    assert apply_ops(lines, ops) == ["only", "tail"]


def test_workspace_edit_groups_by_document(tmp_path) -> None:
    main_uri = path_to_uri(str(tmp_path / "main.py"))
    lib_uri = path_to_uri(str(tmp_path / "lib.py"))
    missing_uri = path_to_uri(str(tmp_path / "missing.py"))
    contents = {main_uri: ["x = 1"], lib_uri: ["from main import x"]}
    edit = WorkspaceEdit(
        changes={main_uri: [make_edit((0, 0), (0, 1), "y")]},
        document_changes=[
            TextDocumentEdit(
                text_document=OptionalVersionedTextDocumentIdentifier(
                    uri=lib_uri, version=None
                ),
                edits=[make_edit((0, 17), (0, 18), "y")],
            ),
            TextDocumentEdit(
                text_document=OptionalVersionedTextDocumentIdentifier(
                    uri=missing_uri, version=None
                ),
                edits=[make_edit((0, 0), (0, 1), "y")],
            ),
            CreateFile(uri=path_to_uri(str(tmp_path / "new.py"))),
        ],
    )

    patches = workspace_edit_to_patches(edit, contents.get)

    by_uri = {patch.document_id: patch for patch in patches}
    assert set(by_uri) == {main_uri, lib_uri}
    assert by_uri[main_uri].operations == (EditOperation.replace(1, "y = 1"),)
    assert by_uri[lib_uri].operations == (
        EditOperation.replace(1, "from main import y"),
    )
