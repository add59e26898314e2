"""jwt_vc_json credential format handler."""

from .format_handler import FORMAT, JwtVcJsonFormatHandler

__all__ = ["FORMAT", "JwtVcJsonFormatHandler"]
