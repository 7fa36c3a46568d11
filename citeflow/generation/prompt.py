from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from citeflow.documents import Document

DEFAULT_TEMPLATE = """Use the numbered documents below to respond to the text in the user_input tags.

<documents>{documents}</documents>

<user_input>{query}</user_input>

Match the level of detail to what the input asks for; prefer concise, easily digestible answers.

Cite every statement drawn from a document by putting the document number in "cited" xml tags, \
for example "Lorem ipsum <cited>1</cited> dolor sit amet <cited>2</cited>.".

Answer in plain text. Markdown is not rendered, with one exception: when the input is about code you \
may include fenced code blocks (```<language> ... ```) or inline `code`. Do not cite code blocks \
themselves; cite the surrounding statements as usual. Avoid blank lines, since every newline is \
rendered individually."""


@dataclass(frozen=True, slots=True)
class PromptTemplate:
    """Template turning a query and its documents into a single user prompt.

    ``template`` must contain ``{documents}`` and ``{query}`` placeholders.
    """

    template: str = DEFAULT_TEMPLATE

    def __post_init__(self) -> None:
        for placeholder in ("{documents}", "{query}"):
            if placeholder not in self.template:
                raise ValueError(f"prompt template is missing the {placeholder} placeholder")

    @staticmethod
    def format_documents(documents: Sequence[Document]) -> str:
        return "\n\n".join(
            f"Document [{index}] <doc>{document.text}</doc>" for index, document in enumerate(documents)
        )

    def render(self, query: str, documents: Sequence[Document]) -> str:
        return self.template.format(documents=self.format_documents(documents), query=query)
