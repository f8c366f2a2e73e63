from variantforge.context import Context


def provider(path, context, payload, variants):
    variants["sqlite"] = Context.new_env_var("DB_DRIVER", "sqlite")
