from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from core.permissions import IsHospitalUser
from core.serializers.patient import DoctorQuerySerializer
from core.services import directory


@api_view(['GET'])
@permission_classes([IsHospitalUser])
def doctors(request):
    q = DoctorQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    return Response(directory.list_doctors(q.validated_data.get('dept')))


@api_view(['GET'])
@permission_classes([IsHospitalUser])
def departments(request):
    return Response(list(directory.DEPARTMENTS))
