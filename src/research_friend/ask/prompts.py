"""Prompt templates for ask mode."""

WHOLE_DOCUMENT_SYSTEM = (
    "You are a helpful assistant processing a {document_type}. "
    "Follow the user's request precisely. Be concise and accurate. "
    "Base your response only on the document content."
)

WHOLE_DOCUMENT_USER = "Here is the {document_type}:\n\n---\n\n{text}\n\n---\n\nRequest: {ask}"

CHUNK_SYSTEM = (
    "You are processing part of a larger {document_type} that has been split due to size. "
    "You are viewing part {current} of {total}. "
    "The user's request below applies to the entire document, but you can only see this portion. "
    "Respond based on what is visible in this part. If this part doesn't contain relevant "
    "information for the request, say so briefly. Your response will be combined with "
    "responses from other parts."
)

CHUNK_USER = (
    "Here is part {current} of {total} of the {document_type}:\n\n"
    "---\n\n{text}\n\n---\n\n"
    "User's request (for the full document): {ask}"
)

SYNTHESIS_SYSTEM = (
    "You are combining partial responses from a chunked document analysis into one unified "
    "answer. The user made a request about a large document that was processed in parts. "
    "Your job is to synthesize the partial responses into a complete, coherent answer."
)

SYNTHESIS_USER = (
    "A {document_type} was too large to process at once, so it was split into {count} parts. "
    "Each part was processed separately with the same user request. "
    "Here are the responses from each part:\n\n"
    "{responses}\n\n"
    "---\n\n"
    'The user\'s original request was: "{ask}"\n\n'
    "Please synthesize the above partial responses into a single, coherent answer to the "
    "user's request. Combine relevant information, eliminate redundancy, and resolve any "
    "apparent contradictions. If some parts indicated they lacked relevant information, "
    "focus on the parts that did contain it. Respond in the same language as the user's "
    "request, regardless of the document's language, unless otherwise specified."
)


def format_part_responses(responses: list[str]) -> str:
    """Render chunk answers under numbered part headings."""
    return "\n\n".join(
        f"## Response from Part {i}\n{response}" for i, response in enumerate(responses, 1)
    )
