# learning_chatbot/utils - logging, config, metrics and persistence helpers
