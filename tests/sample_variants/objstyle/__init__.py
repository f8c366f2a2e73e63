"""Provider published as a module-level VariantProvider object."""
