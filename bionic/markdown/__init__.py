"""Markdown export; this sub-package holds no modules yet."""