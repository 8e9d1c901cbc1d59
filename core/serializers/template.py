from collections.abc import Mapping

from rest_framework import serializers

from core.models import PrescriptionTemplate
from core.services.documents import FONTS

HEX_COLOR = r'^#[0-9A-Fa-f]{6}$'
POSITIONS = ['top-left', 'top-right', 'top-center']
LAYOUTS = ['classic', 'modern', 'minimal']


class PrescriptionTemplateSerializer(serializers.ModelSerializer):
    """camelCase view of :class:`PrescriptionTemplate` used by the settings page."""
    templateName = serializers.CharField(source='template_name', max_length=255, required=False)
    hospitalName = serializers.CharField(source='hospital_name', max_length=255, required=False, allow_blank=True)
    hospitalAddress = serializers.CharField(source='hospital_address', required=False, allow_blank=True)
    hospitalPhone = serializers.CharField(source='hospital_phone', max_length=32, required=False, allow_blank=True)
    hospitalEmail = serializers.EmailField(source='hospital_email', required=False, allow_blank=True)
    hospitalLogo = serializers.CharField(source='hospital_logo', required=False, allow_blank=True)
    doctorNamePosition = serializers.ChoiceField(source='doctor_name_position', choices=POSITIONS, required=False)
    headerText = serializers.CharField(source='header_text', required=False, allow_blank=True, max_length=500)
    footerText = serializers.CharField(source='footer_text', required=False, allow_blank=True, max_length=500)
    showQRCode = serializers.BooleanField(source='show_qr_code', required=False)
    showWatermark = serializers.BooleanField(source='show_watermark', required=False)
    watermarkText = serializers.CharField(source='watermark_text', max_length=64, required=False, allow_blank=True)
    fontSize = serializers.IntegerField(source='font_size', min_value=8, max_value=24, required=False)
    fontFamily = serializers.ChoiceField(source='font_family', choices=list(FONTS), required=False)
    primaryColor = serializers.RegexField(HEX_COLOR, source='primary_color', required=False,
                                          error_messages={'invalid': 'Use a #RRGGBB colour'})
    secondaryColor = serializers.RegexField(HEX_COLOR, source='secondary_color', required=False,
                                            error_messages={'invalid': 'Use a #RRGGBB colour'})
    paperSize = serializers.ChoiceField(source='paper_size', choices=PrescriptionTemplate.PAPER_SIZES, required=False)
    marginTop = serializers.IntegerField(source='margin_top', min_value=0, max_value=200, required=False)
    marginBottom = serializers.IntegerField(source='margin_bottom', min_value=0, max_value=200, required=False)
    marginLeft = serializers.IntegerField(source='margin_left', min_value=0, max_value=200, required=False)
    marginRight = serializers.IntegerField(source='margin_right', min_value=0, max_value=200, required=False)
    showLetterhead = serializers.BooleanField(source='show_letterhead', required=False)
    showVitals = serializers.BooleanField(source='show_vitals', required=False)
    showDiagnosis = serializers.BooleanField(source='show_diagnosis', required=False)
    showHistory = serializers.BooleanField(source='show_history', required=False)
    layoutStyle = serializers.ChoiceField(source='layout_style', choices=LAYOUTS, required=False)
    doctorSignature = serializers.CharField(source='doctor_signature', required=False, allow_blank=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = PrescriptionTemplate
        fields = [
            'templateName', 'hospitalName', 'hospitalAddress', 'hospitalPhone', 'hospitalEmail',
            'hospitalLogo', 'doctorNamePosition', 'headerText', 'footerText', 'showQRCode',
            'showWatermark', 'watermarkText', 'fontSize', 'fontFamily', 'primaryColor',
            'secondaryColor', 'paperSize', 'marginTop', 'marginBottom', 'marginLeft', 'marginRight',
            'showLetterhead', 'showVitals', 'showDiagnosis', 'showHistory', 'layoutStyle',
            'doctorSignature', 'updatedAt',
        ]

    def to_internal_value(self, data):
        if isinstance(data, Mapping):
            # QueryDict.copy() stays a QueryDict so form posts keep single values
            data = data.copy()
            if isinstance(data.get('paperSize'), str):
                data['paperSize'] = data['paperSize'].upper()
        return super().to_internal_value(data)
