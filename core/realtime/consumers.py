"""
Queue socket shared by the reception, doctor, pharmacy and lab dashboards.

Frames are JSON objects ``{"event": name, "data": payload}`` in both
directions.  Handlers write through the same services as the REST views;
the services broadcast to the hospital's rooms and the handler answers
the sender directly.  Failures are reported to the sender only.
"""
import json
import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer
from django.core.serializers.json import DjangoJSONEncoder
from rest_framework.exceptions import ValidationError

from core.models import Hospital, Patient, User
from core.serializers.lab import LabRequestSerializer
from core.services import lab, patients
from core.services.realtime import ROLE_ROOMS, hospital_group, room_group

logger = logging.getLogger(__name__)


def _first_error(detail) -> str:
    """Flatten a DRF error structure to its first message."""
    while isinstance(detail, (list, dict)):
        if not detail:
            return 'Invalid data'
        detail = next(iter(detail.values())) if isinstance(detail, dict) else detail[0]
    return str(detail)


@database_sync_to_async
def _hospital_is_active(hospital_id) -> bool:
    return Hospital.objects.filter(id=hospital_id, subscription_status=Hospital.STATUS_ACTIVE).exists()


@database_sync_to_async
def _create_lab_request(hospital_id, data) -> int:
    s = LabRequestSerializer(data=data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    test = lab.create_request(
        hospital_id, patient_id=v['patientId'], test_name=v['testName'],
        doctor_id=v.get('doctorId'), priority=v['priority'],
    )
    return test.id


class QueueConsumer(AsyncWebsocketConsumer):

    async def connect(self):
        self.groups_joined = []
        self.role = None
        user = self.scope.get("user")
        if not (user and user.is_authenticated):
            await self.close(code=4001)
            return
        self.user = user
        self.hospital_id = user.hospital_id
        if self.hospital_id is not None:
            if not await _hospital_is_active(self.hospital_id):
                await self.close(code=4003)
                return
        elif user.role != User.ROLE_SUPERADMIN:
            await self.close(code=4003)
            return
        await self.accept()
        if self.hospital_id is not None:
            await self._add(hospital_group(self.hospital_id))

    async def disconnect(self, close_code):
        await self._leave_all()

    async def _leave_all(self):
        for group in getattr(self, "groups_joined", []):
            await self.channel_layer.group_discard(group, self.channel_name)
        self.groups_joined = []

    async def _add(self, group: str):
        if group not in self.groups_joined:
            await self.channel_layer.group_add(group, self.channel_name)
            self.groups_joined.append(group)

    async def emit(self, event: str, data):
        await self.send(json.dumps({"event": event, "data": data}, cls=DjangoJSONEncoder))

    async def receive(self, text_data=None, bytes_data=None):
        if not text_data:
            return
        try:
            frame = json.loads(text_data)
            event = frame["event"]
            data = frame.get("data")
            if not isinstance(event, str):
                raise TypeError(event)
        except (ValueError, TypeError, KeyError, AttributeError):
            await self.emit("error", {"event": None, "message": "Malformed frame"})
            return

        handler = self.HANDLERS.get(event)
        if handler is None:
            await self.emit("error", {"event": event, "message": f"Unknown event: {event}"})
            return
        if event != "join" and self.hospital_id is None:
            await self.emit("error", {"event": event, "message": "Join a hospital first"})
            return
        await handler(self, data if data is not None else {})

    # -- handlers ---------------------------------------------------------

    async def on_join(self, data):
        """``data`` is the role name, or ``{"role", "hospitalId"}``."""
        if isinstance(data, dict):
            role = data.get("role")
            # only the platform admin may pick a hospital
            if self.user.role == User.ROLE_SUPERADMIN and data.get("hospitalId"):
                try:
                    hospital_id = int(data["hospitalId"])
                except (TypeError, ValueError):
                    await self.emit("error", {"event": "join", "message": "Invalid hospitalId"})
                    return
                if hospital_id != self.hospital_id:
                    await self._leave_all()
                    self.hospital_id = hospital_id
                await self._add(hospital_group(self.hospital_id))
        else:
            role = data
        self.role = role
        room = ROLE_ROOMS.get(role) if isinstance(role, str) else None
        if room and self.hospital_id is not None:
            await self._add(room_group(self.hospital_id, room))
        logger.info("socket %s joined hospital=%s role=%s", self.channel_name, self.hospital_id, role)
        await self.emit("joined", {"role": role, "room": room, "hospitalId": self.hospital_id})

    async def on_register_patient(self, data):
        try:
            patient = await database_sync_to_async(patients.register_patient)(self.hospital_id, data)
        except ValidationError as e:
            await self.emit("patient-registration-error", {"message": _first_error(e.detail)})
            return
        except Exception as e:
            logger.exception("register-patient failed")
            await self.emit("patient-registration-error", {"message": str(e)})
            return
        await self.emit("patient-registered", patient)

    async def on_move_patient(self, data):
        try:
            await database_sync_to_async(patients.move_patient)(self.hospital_id, data)
        except ValidationError as e:
            await self.emit("error", {"event": "move-patient", "message": _first_error(e.detail)})
        except Patient.DoesNotExist:
            await self.emit("error", {"event": "move-patient", "message": "Patient not found"})
        except Exception as e:
            logger.exception("move-patient failed")
            await self.emit("error", {"event": "move-patient", "message": str(e)})

    async def on_update_prescription(self, data):
        try:
            patient = await database_sync_to_async(patients.update_prescription)(self.hospital_id, data)
        except ValidationError as e:
            await self.emit("error", {"event": "update-prescription", "message": _first_error(e.detail)})
            return
        except Patient.DoesNotExist:
            await self.emit("error", {"event": "update-prescription", "message": "Patient not found"})
            return
        except Exception as e:
            logger.exception("update-prescription failed")
            await self.emit("error", {"event": "update-prescription", "message": str(e)})
            return
        await self.emit("prescription-updated", patient)

    async def on_create_lab_request(self, data):
        try:
            test_id = await _create_lab_request(self.hospital_id, data)
        except ValidationError as e:
            await self.emit("lab-request-created", {"success": False, "message": _first_error(e.detail)})
            return
        except Patient.DoesNotExist:
            await self.emit("lab-request-created", {"success": False, "message": "Patient not found"})
            return
        except Exception as e:
            logger.exception("create-lab-request failed")
            await self.emit("lab-request-created", {"success": False, "message": str(e)})
            return
        await self.emit("lab-request-created", {"success": True, "testId": test_id})

    HANDLERS = {
        "join": on_join,
        "register-patient": on_register_patient,
        "move-patient": on_move_patient,
        "update-prescription": on_update_prescription,
        "create-lab-request": on_create_lab_request,
    }

    # -- channel layer ----------------------------------------------------

    async def queue_event(self, message):
        # message: {"type": "queue.event", "event": str, "data": {...}}
        await self.emit(message["event"], message["data"])
