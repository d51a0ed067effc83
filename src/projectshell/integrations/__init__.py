"""Framework integrations for projectshell.

Import the submodules directly; each needs its optional dependency:

- ``projectshell.integrations.langchain`` (``pip install projectshell[langchain]``)
- ``projectshell.integrations.pydantic_ai`` (``pip install projectshell[pydantic-ai]``)
"""
