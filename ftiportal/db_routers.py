LEGACY_APP_LABEL = "legacy"
LEGACY_DB_ALIAS = "legacy"


class LegacyRouter:
    """
    Route the legacy member registry models to the SQL Server alias.

    Every other app stays on "default"; nothing but the registry tables is
    ever created on the legacy connection.
    """

    def db_for_read(self, model, **hints):
        if model._meta.app_label == LEGACY_APP_LABEL:
            return LEGACY_DB_ALIAS
        return None

    def db_for_write(self, model, **hints):
        if model._meta.app_label == LEGACY_APP_LABEL:
            return LEGACY_DB_ALIAS
        return None

    def allow_relation(self, obj1, obj2, **hints):
        labels = {obj1._meta.app_label, obj2._meta.app_label}
        if LEGACY_APP_LABEL in labels and len(labels) > 1:
            return False
        return None

    def allow_migrate(self, db, app_label, model_name=None, **hints):
        if app_label == LEGACY_APP_LABEL:
            return db == LEGACY_DB_ALIAS
        return db != LEGACY_DB_ALIAS
