"""Walk a document with a visitor and print an indented outline."""

from inkwell import BaseVisitor, Document, Element, Text, element, paragraph, string, text


class Outline(BaseVisitor[None]):
    def __init__(self) -> None:
        self.lines: list[str] = []

    def visit_heading_one(self, node: Element) -> None:
        self.lines.append(f"# {string(node)}")

    def visit_list_item(self, node: Element) -> None:
        self.lines.append(f"  - {string(node)}")

    def visit_paragraph(self, node: Element) -> None:
        self.lines.append(string(node))

    def visit_mention(self, node: Element) -> None:
        self.lines.append(f"    (mentions @{node.get('username')})")

    def visit_text(self, node: Text) -> None:
        pass


doc = Document(
    (
        element("heading-one", text("Standup")),
        element(
            "bulleted-list",
            element("list-item", text("ship the editor")),
            element("list-item", text("review with "), element("mention", text(), username="margie"), text("")),
        ),
        paragraph(text("That's all.")),
    )
)

outline = Outline()
outline.visit(doc)
print("\n".join(outline.lines))
