from typing import Optional, Sequence


class RasterizerError(Exception):
    """Base class for failures raised by the rasterizer."""


class ConfigurationError(RasterizerError, ValueError):
    """Invalid or incomplete configuration (e.g. an output format without `format`)."""


class ExternalToolError(RasterizerError):
    """
    An external step (optimizer, renderer or compressor) reported failure.

    Carries enough context to reproduce the invocation from the log line.
    """

    def __init__(
        self,
        tool: str,
        args: Sequence[str],
        message: str,
        returncode: Optional[int] = None,
        stderr: str = "",
    ) -> None:
        self.tool = tool
        self.args_list = list(args)
        self.returncode = returncode
        self.stderr = stderr
        detail = f"{tool} failed: {message}"
        if returncode is not None:
            detail += f" (exit code {returncode})"
        if stderr:
            detail += f": {stderr.strip()}"
        super().__init__(detail)
