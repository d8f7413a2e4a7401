from tortoise import fields, models


class PlayerSchema(models.Model):
    """A player on the roster whose skin is shown by the bot."""
    id = fields.IntField(primary_key=True, unique=True)
    username = fields.CharField(max_length=64, unique=True, null=False)
    published = fields.BooleanField(default=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True, null=True)

    class Meta:
        table = "player"
