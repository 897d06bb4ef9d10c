"""Browser history import; this sub-package holds no modules yet."""