"""ScriptTrans-LLMs command-line interface."""
