CONTEXT_BUILDER = """You write the hand-off documents for a freshly generated project so a developer (or an AI coding assistant) can continue the work.

Project: {project_name}
Description: {description}

Intent analysis:
{intent}

Architecture summary:
{architecture}

Generated files:
{files}

Write two documents:
1. .cursorrules: coding conventions, stack, folder layout and rules an AI assistant must follow in this project
2. START_PROMPT.md: what was generated, what is left to do, and a first prompt to continue development

Respond with exactly this format and nothing else:
===CURSORRULES===
<contents of .cursorrules>
===START_PROMPT===
<contents of START_PROMPT.md>
"""

CURSORRULES_MARKER = "===CURSORRULES==="
START_PROMPT_MARKER = "===START_PROMPT==="
