"""
Completion Runner package.

Provides:
- A one-shot request runner against an Azure OpenAI completions deployment
- The extractive summarization variant (paginated job results) against Azure Language
"""
