from variantforge.context import Context


def provider(path, context, payload, variants):
    variants["en"] = Context.new_env_var("LANG", "en_US.UTF-8")
