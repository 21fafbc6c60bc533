import logging
from fastapi import WebSocket
from typing import Dict, List

logger = logging.getLogger(__name__)


class ClassRoomManager:
    """Live class chat: one room of websockets per class id"""

    def __init__(self):
        self.rooms: Dict[str, List[WebSocket]] = {}

    async def connect(self, websocket: WebSocket, class_id: str):
        await websocket.accept()
        self.rooms.setdefault(class_id, []).append(websocket)

    def disconnect(self, websocket: WebSocket, class_id: str):
        if class_id in self.rooms:
            if websocket in self.rooms[class_id]:
                self.rooms[class_id].remove(websocket)
            # drop empty rooms
            if not self.rooms[class_id]:
                del self.rooms[class_id]

    async def broadcast(self, class_id: str, message: dict):
        # iterate over a copy, dead connections are removed on the way
        for connection in list(self.rooms.get(class_id, [])):
            try:
                await connection.send_json(message)
            except Exception as e:
                logger.debug("Dropping dead class chat connection: %s", e)
                self.disconnect(connection, class_id)


manager = ClassRoomManager()
