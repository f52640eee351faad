from unittest import mock

import pytest

from pharmastock.services.ai import GoogleAIClientError, GoogleAIResult
from pharmastock.services.errors import RemoteServiceError
from pharmastock.services.suggestion_service import StockSuggestionService, parse_suggestion


def _client_returning(text):
    client = mock.Mock()
    client.generate_content.return_value = GoogleAIResult(text=text, raw=None, finish_reason='STOP')
    return client


class TestParseSuggestion:

    def test_full_answer(self):
        suggestion = parse_suggestion(
            '{"adjustmentSuggestion": "Reduce stock", "suggestedQuantity": -20, "reason": "Expires soon"}'
        )
        assert suggestion.to_dict() == {
            'adjustmentSuggestion': 'Reduce stock',
            'suggestedQuantity': -20,
            'reason': 'Expires soon',
        }

    def test_fenced_answer_with_only_required_key(self):
        suggestion = parse_suggestion('```json\n{"adjustmentSuggestion": "Maintain"}\n```')
        assert suggestion.adjustment_suggestion == 'Maintain'
        assert suggestion.suggested_quantity is None
        assert suggestion.reason is None

    def test_non_numeric_quantity_is_dropped(self):
        assert parse_suggestion('{"adjustmentSuggestion": "Increase", "suggestedQuantity": "50"}').suggested_quantity is None
        assert parse_suggestion('{"adjustmentSuggestion": "Increase", "suggestedQuantity": true}').suggested_quantity is None

    @pytest.mark.parametrize('text', [
        '',
        'Increase the stock, it is low.',
        '["adjustmentSuggestion"]',
        '{"suggestedQuantity": 5}',
        '{"adjustmentSuggestion": "   "}',
    ])
    def test_unusable_answers_fail(self, text):
        with pytest.raises(RemoteServiceError) as exc_info:
            parse_suggestion(text)
        assert exc_info.value.status_code == 502


class TestStockSuggestionService:

    def test_suggest_sends_drug_context(self, app_context):
        client = _client_returning('{"adjustmentSuggestion": "Maintain", "reason": "Far expiry"}')
        service = StockSuggestionService(client=client)

        suggestion = service.suggest('Amoxicillin 500mg', 120, '2027-06-30')

        assert suggestion.reason == 'Far expiry'
        kwargs = client.generate_content.call_args.kwargs
        prompt = kwargs['contents'][0]['parts'][0]['text']
        assert 'Drug Name: Amoxicillin 500mg' in prompt
        assert 'Current Stock: 120' in prompt
        assert 'Expiry Date: 2027-06-30' in prompt
        assert kwargs['generation_config']['response_mime_type'] == 'application/json'

    def test_missing_expiry_is_sent_as_not_applicable(self):
        assert 'Expiry Date: N/A' in StockSuggestionService.build_prompt('Saline', 10, None)

    def test_client_failure_becomes_remote_error(self, app_context):
        client = mock.Mock()
        client.generate_content.side_effect = GoogleAIClientError('timeout')
        with pytest.raises(RemoteServiceError) as exc_info:
            StockSuggestionService(client=client).suggest('Saline', 10, 'N/A')
        assert exc_info.value.message == 'Failed to get suggestion from AI model.'

    def test_missing_api_key_is_not_configured(self, app_context):
        with pytest.raises(RemoteServiceError) as exc_info:
            StockSuggestionService()
        assert exc_info.value.message == 'Stock suggestions are not configured.'

    def test_disabled_feature(self, app):
        app.config['FEATURE_STOCK_SUGGESTIONS'] = False
        with app.app_context():
            with pytest.raises(RemoteServiceError) as exc_info:
                StockSuggestionService(client=mock.Mock())
        assert exc_info.value.message == 'Stock suggestions are disabled.'
