"""User-facing copy (pt-BR) for toasts and empty states."""

LOAD_FAILED = "Erro ao carregar feedbacks"

SIGNED_IN = "Bem-vindo de volta!"
SIGN_IN_FAILED = "Erro ao entrar"
SIGNED_OUT = "Até logo!"
SIGN_OUT_FAILED = "Erro ao sair"

LOGIN_REQUIRED = "Você precisa estar logado"
LOGIN_REQUIRED_TO_COMMENT = "Você precisa estar logado para comentar"

FEEDBACK_PUBLISHED = "Feedback publicado com sucesso!"
FEEDBACK_FAILED = "Erro ao publicar feedback"

COMMENT_SENT = "Comentário enviado!"
COMMENT_FAILED = "Erro ao enviar comentário"

FEED_TITLE = "Feed de Feedbacks"
FEED_SUBTITLE = "Veja o que seus colegas estão dizendo"
EMPTY_FEED_TITLE = "Nenhum feedback ainda"
EMPTY_FEED_BODY = "Seja o primeiro a compartilhar sua opinião sobre o ano letivo!"
