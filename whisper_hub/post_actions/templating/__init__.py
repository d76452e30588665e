from whisper_hub.post_actions.templating.evaluator import available_functions, available_variables, check_syntax, render

__all__ = ["available_functions", "available_variables", "check_syntax", "render"]
