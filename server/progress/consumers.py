from channels.generic.websocket import AsyncJsonWebsocketConsumer

from progress.services import LEADERBOARD_GROUP


class LeaderboardConsumer(AsyncJsonWebsocketConsumer):
    """Tells connected clients to refetch /api/leaderboard/ after points change."""

    async def connect(self):
        await self.channel_layer.group_add(LEADERBOARD_GROUP, self.channel_name)
        await self.accept()

    async def disconnect(self, code):
        await self.channel_layer.group_discard(LEADERBOARD_GROUP, self.channel_name)

    async def lb_changed_all(self, event):
        await self.send_json({"type": "lb_changed_all"})
