from marshmallow import fields, post_load

from tenant_tables.extensions import ma
from tenant_tables.tables.scoping import AccessScope


class AccessScopeSchema(ma.Schema):
    owner_id = fields.String(allow_none=True, load_default=None)
    project_id = fields.String(allow_none=True, load_default=None)
    is_admin = fields.Boolean(load_default=False)
    show_hidden = fields.Boolean(load_default=False)

    @post_load
    def make_scope(self, data, **kwargs):
        return AccessScope(**data)
