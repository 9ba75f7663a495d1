"""
Organization-scoped semantic retrieval engine for the CRM AI assistant.

Searches previously embedded document chunks for a tenant and formats the
best matches for injection into a language-model prompt.
"""
