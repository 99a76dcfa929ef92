"""
Command groups for the llm-sync CLI.
"""
