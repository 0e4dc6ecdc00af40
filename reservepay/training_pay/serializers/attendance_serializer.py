from rest_framework import serializers


class TraineeAttendanceSerializer(serializers.Serializer):
    trainee_id = serializers.IntegerField()
    name = serializers.CharField()
    rank = serializers.CharField(allow_blank=True)
    present = serializers.IntegerField()
    absent = serializers.IntegerField()
    pending = serializers.IntegerField()
    total = serializers.IntegerField()
    rate = serializers.IntegerField(help_text="Present share in percent")


class SessionAttendanceSerializer(serializers.Serializer):
    session_id = serializers.IntegerField()
    title = serializers.CharField()
    date = serializers.DateField()
    present = serializers.IntegerField()
    total = serializers.IntegerField()
    rate = serializers.IntegerField()


class AttendanceSummarySerializer(serializers.Serializer):
    by_trainee = TraineeAttendanceSerializer(many=True)
    by_session = SessionAttendanceSerializer(many=True)
