"""
Code Generation Portal AI Assistant
===================================

Serverless handlers that answer portal questions with a Claude model,
optionally grounding the answer in rows from the portal database:

- Query Analyzer: decides which tables a question should search
- Search Aggregator: one filtered lookup per table, broad fallback when empty
- Prompt Builder: enumerates retrieved rows and constrains the model to them
- Completion Client: tries an ordered list of models until one answers

Every request is stateless; nothing is cached or persisted between calls.
"""

__version__ = "1.0.0"
