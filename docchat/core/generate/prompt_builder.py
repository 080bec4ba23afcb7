SYSTEM_PROMPT = """You are a helpful AI assistant for internal company documentation. Your role is to answer questions based on the provided context from uploaded documents.

Instructions:
1. Answer questions using only the information provided in the context
2. If the context doesn't contain relevant information, clearly state that you cannot find the answer in the uploaded documents
3. Be concise but comprehensive in your responses
4. When referencing information, indicate which document it came from if possible
5. If multiple documents contain relevant information, synthesize the information appropriately"""

NO_CONTEXT = "No relevant documents found."

class PromptBuilder:
    @staticmethod
    def build_context(contexts: list[str]) -> str:
        """Retrieved fragments separated by blank lines."""
        return "\n\n".join(contexts) if contexts else NO_CONTEXT

    @staticmethod
    def build_messages(query: str, contexts: list[str]) -> list[dict]:
        """
        Compiles the instruction preamble and retrieved contexts into chat messages.
        An empty context set still produces a prompt so the model can say so.
        """
        context_str = PromptBuilder.build_context(contexts)
        user_content = f"Context from uploaded documents:\n{context_str}\n\nQuestion: {query}"

        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": user_content}
        ]
