"""Type into an editor, pick a mention, and dump the document as JSON."""

from inkwell import Editor, collect_mentions, to_json
from inkwell.mentions import example_document

editor = Editor(example_document())
editor.subscribe(lambda value: print("changed:", collect_mentions(value)))

editor.type_text(" cc @ma")
print("candidates:", editor.mention_state.candidates)
editor.handle_key("ArrowDown")
editor.handle_key("Enter")

print(to_json(editor.value, indent=2))
