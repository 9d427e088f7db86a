# CCJK Config Schema Definitions
# Built-in schemas for the preferences, native-settings and runtime-state documents

from ccjk_config.schema.fields import SchemaField, array, obj

SUPPORTED_LANGS = ("zh-CN", "en")
SUPPORTED_TOOLS = ("claude-code", "codex", "aider", "continue", "cline", "cursor")
INSTALL_TYPES = ("global", "local")
THEMES = ("light", "dark", "auto")

VERSION_PATTERN = r"^\d+\.\d+\.\d+$"

PREFERENCES_VERSION = "5.0.0"
RUNTIME_STATE_VERSION = "1.0.0"


def _api_endpoint(*, base_url_required: bool = False) -> SchemaField:
    return obj(
        {
            "baseUrl": SchemaField("string", format="url", required=base_url_required),
            "apiKey": SchemaField("string", format="api-key"),
            "timeout": SchemaField("number", minimum=1000, maximum=300000),
            "retries": SchemaField("number", minimum=0, maximum=10),
        }
    )


PREFERENCES_SCHEMA = obj(
    {
        "version": SchemaField("string", required=True, pattern=VERSION_PATTERN, description="Document version"),
        "lastUpdated": SchemaField("string", required=True, format="date-time", description="Last write time"),
        "general": obj(
            {
                "preferredLang": SchemaField("string", required=True, enum=SUPPORTED_LANGS),
                "templateLang": SchemaField("string", enum=SUPPORTED_LANGS),
                "aiOutputLang": SchemaField("string"),
                "currentTool": SchemaField("string", required=True, enum=SUPPORTED_TOOLS),
                "theme": SchemaField("string", enum=THEMES),
            },
            required=True,
        ),
        "tools": obj(
            {
                "claudeCode": obj(
                    {
                        "enabled": SchemaField("boolean", required=True),
                        "installType": SchemaField("string", enum=INSTALL_TYPES),
                        "installMethod": SchemaField("string"),
                        "outputStyles": array(SchemaField("string")),
                        "defaultOutputStyle": SchemaField("string"),
                        "currentProfile": SchemaField("string"),
                        "profiles": obj(None, additional_properties=True),
                        "version": SchemaField("string"),
                    },
                    required=True,
                ),
                "codex": obj(
                    {
                        "enabled": SchemaField("boolean", required=True),
                        "systemPromptStyle": SchemaField("string"),
                        "model": SchemaField("string"),
                        "installMethod": SchemaField("string"),
                        "envKeyMigrated": SchemaField("boolean"),
                        "version": SchemaField("string"),
                    },
                    required=True,
                ),
            },
            required=True,
            additional_properties=True,
        ),
        "api": obj(
            {
                "anthropic": _api_endpoint(),
                "openai": _api_endpoint(),
                "custom": array(_api_endpoint(base_url_required=True)),
            }
        ),
        "features": obj(
            {
                "hotReload": SchemaField("boolean", default=True),
                "autoMigration": SchemaField("boolean", default=True),
                "telemetry": SchemaField("boolean", default=False),
                "experimentalFeatures": array(SchemaField("string")),
            }
        ),
    }
)


NATIVE_SETTINGS_SCHEMA = obj(
    {
        "model": SchemaField("string"),
        "env": obj(
            {
                "ANTHROPIC_API_KEY": SchemaField("string", format="api-key"),
                "ANTHROPIC_AUTH_TOKEN": SchemaField("string", min_length=1),
                "ANTHROPIC_BASE_URL": SchemaField("string", format="url"),
                "ANTHROPIC_MODEL": SchemaField("string"),
                "ANTHROPIC_SMALL_FAST_MODEL": SchemaField("string"),
                "MCP_TIMEOUT": SchemaField(("number", "string"), format="numeric", minimum=1000, maximum=600000),
            },
            additional_properties=True,
        ),
        "permissions": obj(
            {
                "allow": array(SchemaField("string")),
                "deny": array(SchemaField("string")),
            },
            additional_properties=True,
        ),
        "outputStyle": SchemaField("string"),
    },
    additional_properties=True,
)


RUNTIME_STATE_SCHEMA = obj(
    {
        "version": SchemaField("string", required=True, pattern=VERSION_PATTERN),
        "lastUpdated": SchemaField("string", required=True, format="date-time"),
        "sessions": array(
            obj(
                {
                    "id": SchemaField("string", required=True, min_length=1),
                    "startedAt": SchemaField("string", required=True, format="date-time"),
                    "tool": SchemaField("string", enum=SUPPORTED_TOOLS),
                    "cwd": SchemaField("string"),
                    "endedAt": SchemaField(("string", "null"), format="date-time"),
                }
            ),
            required=True,
        ),
        "cache": obj(
            {
                "lastCleanup": SchemaField(("string", "null"), format="date-time"),
                "size": SchemaField("number", minimum=0),
                "maxAge": SchemaField("number", minimum=0),
            },
            required=True,
        ),
        "updates": obj(
            {
                "lastCheck": SchemaField(("string", "null"), format="date-time"),
                "lastVersion": SchemaField(("string", "null")),
                "currentVersion": SchemaField("string"),
                "updateAvailable": SchemaField("boolean"),
            },
            required=True,
        ),
    }
)
