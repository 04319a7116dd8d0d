"""Prompt assembly for RAG queries."""

from rag_gateway.llm.models import Message, Role


class RAGPromptTemplate:
    """Builds the chat messages for a query.

    Retrieved documents become a numbered context block, which is either
    merged into the system message or wrapped around the user's prompt.
    """

    DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant."

    DEFAULT_RAG_SYSTEM_PROMPT = (
        "You are a helpful assistant. Answer the question based on the provided "
        "context. If the context doesn't contain relevant information, say so."
    )

    DEFAULT_USER_TEMPLATE = "Context:\n{context}\n\nQuestion: {question}"

    CONTEXT_SUFFIX = "\n\nContext:\n{context}"

    def __init__(
        self,
        system_prompt: str | None = None,
        rag_system_prompt: str | None = None,
        user_template: str | None = None,
    ) -> None:
        self.system_prompt = system_prompt or self.DEFAULT_SYSTEM_PROMPT
        self.rag_system_prompt = rag_system_prompt or self.DEFAULT_RAG_SYSTEM_PROMPT
        self.user_template = user_template or self.DEFAULT_USER_TEMPLATE

    def format_context(self, chunks: list[str]) -> str:
        """Number chunks in rank order: `[1] ...`, `[2] ...`."""
        return "\n\n".join(f"[{i}] {chunk}" for i, chunk in enumerate(chunks, start=1))

    def select_system_prompt(self, override: str | None, retrieval: bool) -> str:
        if override:
            return override
        return self.rag_system_prompt if retrieval else self.system_prompt

    def build_messages(
        self,
        *,
        prompt: str | None,
        messages: list[Message] | None,
        context: str,
        system: str | None,
        retrieval: bool,
    ) -> list[Message]:
        """Assemble the final conversation.

        Args:
            prompt: Bare prompt (used when `messages` is None).
            messages: Caller chat history.
            context: Formatted context block, empty if nothing was retrieved.
            system: System prompt override.
            retrieval: Whether a collection was searched.

        Returns:
            Messages to send to the chat model.
        """
        system_prompt = self.select_system_prompt(system, retrieval)

        if messages is not None:
            result = [m.model_copy() for m in messages]
            if not context:
                return result

            suffix = self.CONTEXT_SUFFIX.format(context=context)
            for i, message in enumerate(result):
                if message.role == Role.SYSTEM:
                    result[i] = message.model_copy(update={"content": message.content + suffix})
                    return result

            result.insert(0, Message(role=Role.SYSTEM, content=system_prompt + suffix))
            return result

        question = prompt or ""
        user_content = (
            self.user_template.format(context=context, question=question) if context else question
        )
        return [
            Message(role=Role.SYSTEM, content=system_prompt),
            Message(role=Role.USER, content=user_content),
        ]
