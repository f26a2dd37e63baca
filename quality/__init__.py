"""Quality utilities: URL validation and reference resolution."""

from quality.urlnorm import is_http_url, origin_of, policy_path_of, resolve_url, validate_target_url

__all__ = ["is_http_url", "origin_of", "policy_path_of", "resolve_url", "validate_target_url"]
