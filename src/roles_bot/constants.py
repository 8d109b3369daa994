HELP_MESSAGE = """I need the **Manage Roles** and **Add Reactions** permissions.
I can only hand out roles that sit below my own highest role.

Create a reaction-role message by starting it with `%TRIGGER%` and putting role tokens anywhere in the text:

%TRIGGER% Pick your languages!
`{ROLE:Rust}` for the crabs, `{ROLE:Python}` for the snakes
Roles can be named (`{ROLE:Rust}`) or given by id (`{ROLE:123456789012345678}`).

I react to the message with one emoji per role. Members who react get the role; removing the reaction removes it.
Delete the message (or use `/unregister`) to stop.

Auto roles for new members:
`%TRIGGER% autorole Role1 Role2` set, `%TRIGGER% autorole clear` clear, `%TRIGGER% autorole` show."""

NO_PERMISSION_MESSAGE = "You need the **Manage Roles** permission to do that."


def help_message(trigger: str) -> str:
    return HELP_MESSAGE.replace("%TRIGGER%", trigger)
