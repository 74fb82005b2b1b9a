CHAT_SYSTEM_PROMPT = "You are a helpful news chatbot."

def format_search_context(results):
    """Format web search results into bullet snippets for the LLM context."""
    snippets = []
    for item in results or []:
        title = item.get('title', '')
        description = item.get('description') or ''
        snippets.append(f"• {title}: {description}")
    return "\n".join(snippets)

def format_chat_prompt(context, question):
    """Format the chat prompt asking for a short conversational answer."""
    return (
        "You are a helpful news chatbot. Use the following news context to answer the user's "
        "question in a short, conversational way (2-3 sentences max, no long paragraphs).\n\n"
        f"News context:\n{context}\n\n"
        f"User: {question}\nBot:"
    )

def format_summary_context(articles, limit=5, snippet_length=200):
    """Format the most recent articles as a numbered list of title and snippet."""
    lines = []
    for i, article in enumerate(articles[:limit], 1):
        lines.append(f"{i}. [{article.title}]: {article.content[:snippet_length]}")
    return "\n".join(lines)

def format_summary_request(category, context):
    """Format the question used to summarise a batch of category headlines."""
    return (
        "You are an AI news analyst. Here are the latest news headlines and summaries for the "
        f"\"{category}\" category:\n\n{context}\n\n"
        "Please provide a 3-5 sentence summary of the overall trends, sentiment, and any notable "
        "events or patterns you see in this news batch."
    )

def format_mock_response(message):
    """Deterministic chat reply used by the test endpoint."""
    mock_context = f"Mock context for: {message}"
    mock_answer = f"This is a mock answer to: '{message}'. (Context: {mock_context})"
    return {"answer": mock_answer, "context": mock_context}
