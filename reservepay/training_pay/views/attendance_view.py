from django.core.exceptions import ObjectDoesNotExist
from rest_framework.response import Response
from rest_framework.views import APIView

from training_pay.selectors.directory_selector import attendance_summary, get_batch
from training_pay.serializers.attendance_serializer import AttendanceSummarySerializer
from .utils import extend_schema, extend_schema_view, path_int, responses_ok, std_errors, error_response


@extend_schema_view(
    get=extend_schema(
        tags=["Attendance"], summary="Attendance counts per trainee and per session",
        parameters=[path_int("batch_id", "Batch ID")],
        responses={**responses_ok(AttendanceSummarySerializer), **std_errors()},
    )
)
class AttendanceSummaryView(APIView):
    def get(self, request, batch_id: int):
        try:
            get_batch(batch_id)
        except ObjectDoesNotExist as e:
            return error_response(e)
        return Response(AttendanceSummarySerializer(attendance_summary(batch_id)).data)
