"""Names of the runtime package that generated code calls into."""

# Import path of the runtime package.
MODULE_PATH = "github.com/mateusz834/tgo"

# Local name of the package when imported without an alias.
DEFAULT_ALIAS = "tgo"

# Type of the first parameter of a template function.
CONTEXT_TYPE = "Ctx"

# Only result type of a template function.
ERROR_TYPE = "error"

# Methods of the context value used by generated code.
WRITE_STRING = "WriteString"
DYNAMIC_WRITE = "DynamicWrite"

# Name given to an unnamed or blank context parameter.
CONTEXT_PARAM = "__tgo_ctx"

GENERATED_MARKER = "// Code generated by tgo. DO NOT EDIT."
