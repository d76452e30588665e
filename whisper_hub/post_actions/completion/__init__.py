from whisper_hub.post_actions.completion.adapter import CompletionClient, CompletionError
from whisper_hub.post_actions.completion.processor import RemoteCompletionProcessor

__all__ = ["CompletionClient", "CompletionError", "RemoteCompletionProcessor"]
